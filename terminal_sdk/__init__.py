"""Terminal-side SDK for talking to the Core access-management service."""
