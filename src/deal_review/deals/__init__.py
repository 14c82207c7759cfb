"""Deal review queue -- display schemas, HubSpot integration, query and mutation services."""
