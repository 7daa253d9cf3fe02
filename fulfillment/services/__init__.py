"""
                        Services Module

Contains the fulfillment business logic.

Services:
    - catalog: Product catalog adapter (bundled marketplace menu)
    - inventory: Stock ledger, availability, alerts and reporting
    - orders: Order creation and status lifecycle
    - notifications: Mock (development) and Twilio (production) alert notifiers
"""
