"""Navigation modules: scene switching, the onboarding tour and its timers."""
