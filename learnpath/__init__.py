"""LearnPath backend: video catalog, learning progress and gamification."""
