"""
auth — email + password accounts and sessions.

Provides:
  • ``AuthDelegate`` — sign-up / sign-in / sign-out / session lookup
  • Password hashing (bcrypt)
  • Signed session cookies and email-action tokens (HMAC-SHA256)
  • After-hooks, narrowed to ``SignupCompleted`` events for the welcome email
  • Auth API routes mounted at /api/auth
"""
