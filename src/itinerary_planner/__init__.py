"""Intelligent itinerary planner service."""
