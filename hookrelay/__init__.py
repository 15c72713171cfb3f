"""
hookrelay: TradingView webhook receiver with a live WebSocket dashboard.

Stores the most recent webhook alerts in memory and streams each new one to
every connected dashboard in real time. The ASGI application is built by
hookrelay.main.create_app().
"""
