"""Scheduled push jobs: daily devotional and event reminders."""
