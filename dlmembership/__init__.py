"""DL membership webhook.

Applies bulk add/remove membership changes to a directory group on behalf of
an external webhook trigger.
"""
