"""Attendees package.

Presence tracking by sign-in/sign-out timecards, organized by feature modules
(activities, locations, members, timecard) with a thin Flask controller layer
and service/repository layers underneath.
"""
