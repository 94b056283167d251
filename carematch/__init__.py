"""
CareMatch Services

This package contains the core Python services:
- users: Profile completion and user lookup
- caregivers: Caregiver profiles and the public caregiver directory
- postings: Job postings owned by guardians
- applications: Application state machine (submit / decide / withdraw)
- chat: Chat room coordination and the polled message log
- reviews: Post-completion review gate
- dashboards: Role dashboards
- notifier: Fire-and-forget notification delivery
"""
