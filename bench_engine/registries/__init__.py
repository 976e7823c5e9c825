"""Engine registries.

String keys map to factories or configs and are resolved once, at
configuration time:
- add a new implementation
- register it
- the rest of the system stays closed for modification
"""
