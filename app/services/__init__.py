"""
Services layer - business logic for accounts and reports.

DESIGN PRINCIPLE:
- Services contain business logic, NOT routes
- LifecycleEngine is the only writer; routes call its commands
- Advisory analysis assists the dispatcher and never decides
"""
