"""tasklane - timelines, dependency networks and CSV import for project tasks."""
