"""
Nutrition Lens backend root package.

This package contains the FastAPI app entry point (main.py), API routes,
the session state machine for smart glasses, the background worker pool,
and the infrastructure clients (MongoDB, UploadThing, Groq, Discord).
"""
