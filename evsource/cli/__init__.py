"""
evsource CLI

Commands:
- evsource account create/deposit/withdraw/balance/close - Submit one command
- evsource replay - Rebuild an account's state from the log
- evsource log tail/verify - Event log operations
"""
