"""HTTP middleware shared by the API and the gateway."""
