"""
Client-side orchestration for the visa portal API: autosave of the
application draft, the submission flow and the payment status poller.
"""
