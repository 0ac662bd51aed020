"""User management: client registration and authentication."""