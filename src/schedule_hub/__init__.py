"""Schedule Hub: Slack meeting notices to local schedules and reminders."""
