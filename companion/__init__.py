"""
Client-side companion logic: gateway API client, SOS safety timer and
Google Calendar integration.
"""
