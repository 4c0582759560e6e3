"""Point-to-route projection and KP/DCC calculation."""
