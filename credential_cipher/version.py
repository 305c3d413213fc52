"""Credential Cipher Meta information.
   Credential Cipher encrypts third-party integration secrets
   into at-rest-safe envelopes.
"""
__title__ = 'credential_cipher'
__description__ = (
   'Credential Cipher encrypts third-party integration secrets '
   'into at-rest-safe envelopes.'
)
__version__ = '0.1.0'
__license__ = 'Apache-2.0'
