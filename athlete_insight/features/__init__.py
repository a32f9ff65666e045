"""Feature packages: strava sync, local store, analytics."""
