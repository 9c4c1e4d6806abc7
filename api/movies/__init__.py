"""
Movie records: storage, validation, and the create/update/delete use cases
that keep the store, the id counter and the mirror file in step.
"""
