"""
Core modules for the payout bot.

This package contains fee conversion, identity resolution, announcement
formatting and the payout check orchestration.
"""
