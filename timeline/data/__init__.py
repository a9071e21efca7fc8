"""
Derived indexes and the filter engine over a loaded EventStore.
"""
