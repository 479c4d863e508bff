"""MubXpress waitlist: referral leaderboard and signup flow."""

__version__ = "0.1.0"
