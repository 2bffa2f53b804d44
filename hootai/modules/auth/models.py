# Supabase Auth
# This module uses Supabase's built-in authentication system
# No custom tables are required - Supabase Auth handles:
# - Magic-link (OTP) emails and OAuth provider redirects
# - Password sign-up/sign-in and password reset emails
# - JWT token generation and validation

"""
Supabase Auth calls used here:
- auth.sign_in_with_otp() - Send a magic link
- auth.sign_in_with_oauth() - Build the provider redirect URL
- auth.exchange_code_for_session() / auth.verify_otp() - Finish a redirect flow
- auth.sign_up() / auth.sign_in_with_password() - Password flow
- auth.reset_password_for_email() - Password reset email
- auth.get_user() - Resolve the user behind an access token
- auth.admin.sign_out() - Revoke a session

Profile rows for signed-in users live in user_profiles (see profiles module).
"""
