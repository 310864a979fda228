# Routes package init
"""
SpellNote Backend - API Routes Package
========================================

Route Inventory:
    - notes.py:   GET  /notes?user_id=   (list a user's notes)
                  POST /add-note         (correct and store a note)
    - health.py:  GET  /health           (service health check)

Routes stay thin: authenticate, delegate to a service, shape the response.
"""
