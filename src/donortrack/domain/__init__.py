"""Domain layer for donortrack: entities, services and the payment import pipeline."""
