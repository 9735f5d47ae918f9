"""Itinerary routing: scored candidates in, ordered stops out."""
