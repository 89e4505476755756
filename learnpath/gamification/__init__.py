"""Points, badges and streaks earned from identified progress."""
