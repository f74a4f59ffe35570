"""Device session and device-management backends."""
