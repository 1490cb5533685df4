"""HTTP API for Orbit: auth, profile sync, admin, push subscriptions and reports."""
