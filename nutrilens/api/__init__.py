"""
API layer for the Nutrition Lens backend.

Exposes the dashboard's HTTP endpoints under /api and the glasses relay
WebSocket under /ws/device/{user_id}.
"""
