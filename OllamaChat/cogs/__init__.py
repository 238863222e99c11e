"""Discord command extensions."""
