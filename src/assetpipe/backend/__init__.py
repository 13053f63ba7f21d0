"""Development servers: the backend serving `dist/` and the live-reload proxy in front of it."""
