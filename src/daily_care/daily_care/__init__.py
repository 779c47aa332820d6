"""Daily care records package.

Feature modules (records, attendance, registrar, history, review) each carry
their own model/repository/service layers; a thin Flask controller layer sits
on top and `state` holds the immutable screen snapshots.
"""
