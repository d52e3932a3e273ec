"""CampusFix REST API."""
