"""HTTP helpers shared by authtrail blueprints."""
