"""CampusFix - campus maintenance tickets, navigation and academic dashboards."""
