from hp_tracker.storage.database import Database
from hp_tracker.storage.key_value import Subscription

# Server state
database = Database()                                  # The realtime tree shared by every client
subscriptions: dict[str, dict[str, Subscription]] = {}  # Store subscriptions by SID, then by path
