"""Navigator Mailbox Meta information.
   Navigator Mailbox keeps short-lived, per-user encrypted messages in memory.
"""
__title__ = 'navigator_mailbox'
__description__ = (
   'Navigator Mailbox keeps short-lived, per-user encrypted '
   'messages in memory.'
)
__version__ = '0.1.0'
__copyright__ = 'Copyright (c) 2026 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
