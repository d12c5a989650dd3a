"""Audio acquisition, pitch estimation and tuning evaluation.

Modules that need PortAudio (``audio_input``, ``tone_player``) are not
imported here so the rest works on machines without audio hardware.
"""
