"""Conversation context service: records, context, conversation, completion."""
