"""
Application Layer

Contains command handlers, queries, and application services.
This layer orchestrates domain objects and the audio/notification ports.

Structure:
- commands/: command definitions, the dispatcher and their handlers
- queries/: read-only views over live sessions (queue page, now playing, stats)
- services/: session registry, gates, playback coordination and notifications
- interfaces/: port interfaces for infrastructure adapters
"""
