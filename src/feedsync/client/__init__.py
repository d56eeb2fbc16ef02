"""Client side of feedsync: transport, auth, data store and sync core."""
