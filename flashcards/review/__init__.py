"""
Client-side review of generated proposals: local accept/reject/edit state,
batch commits to a flashcard store and user notifications.
"""
