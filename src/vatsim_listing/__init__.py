"""Discord bot publishing live VATSIM activity for linked guild members."""
