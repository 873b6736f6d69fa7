"""Push notification core: token store, gateway client, dispatch and cleanup."""
