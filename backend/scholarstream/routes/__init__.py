# Routes package init
"""
Scholar Stream Backend: API Routes Package
===========================================

What:  HTTP route handlers. Each module owns one resource.

Route Inventory:
    - health.py:        GET  /                       (liveness text)
                        GET  /health                 (store connectivity)
    - users.py:         /users, /users/role/{email}, /users/{id}/role
    - scholarships.py:  /scholarships, /scholarships/top
    - applications.py:  /application, /my-application, /manage-application/{email}
    - reviews.py:       /reviews, /application/{id}/review
    - checkout.py:      POST /create-checkout-session

Routes stay thin: extract path/query/body, apply the auth dependency,
call the service, return its result. Business logic lives in services.
"""
