# Services package init
"""
Scholar Stream Backend: Services Layer
=======================================

What:  Business logic between the routes (HTTP) and the document store.
How:   Stateless service singletons; each method receives the MongoStore
       injected into the route and returns response models or plain dicts.

Service Inventory:
    - UserService:         sign-in upsert, lookups, profile, role, delete
    - ScholarshipService:  listing, top-by-fee, admin CRUD
    - ApplicationService:  submission, lookups, moderator actions, dashboard counts
    - ReviewService:       listings, submit-or-update per application, edits
    - PaymentService:      Stripe checkout session creation
"""
