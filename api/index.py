"""
Serverless function: checks for a new orchestrator payout.

The platform discovers the module-level `app`.
"""

from payout_bot.web.app import create_app

app = create_app()
