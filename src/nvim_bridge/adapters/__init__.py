"""Host integrations for the bridge."""
