"""Core console state: models, navigation, drafts, deletion and views."""
