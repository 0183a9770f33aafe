"""ScriptReel: scheduled marketing scripts and lip-synced video generation."""
