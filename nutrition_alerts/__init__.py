"""Nutrition Alerts: meal and goal reminders for diet-tracking clients."""
