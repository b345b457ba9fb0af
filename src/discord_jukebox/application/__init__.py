"""
Application Layer

Ports to the outside world and the services that drive playback.

Structure:
- interfaces/: voice transport, track resolver and object-storage ports
- services/: audio session, session registry, playback sequencer and the
  music controller every front end calls into
"""
