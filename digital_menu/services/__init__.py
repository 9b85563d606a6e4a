"""
                        Services Module

Contains all business logic. Provider-facing services follow the hybrid
pattern: each has a Mock (development) and a Real (production)
implementation behind an abstract base.

Services:
    - identity: Email one-time-code login
    - registry: Restaurants, categories and dishes
    - menu: Customer menu grouped by category
    - orders: Order intake and status workflow
    - cart: Server-side customer carts
    - notifications: SendGrid email delivery
    - storage: Cloudinary image upload
"""
