"""WellSense security hardening toolkit."""
