"""Chat messaging policy.

Decides whether one platform role may open or answer a direct
conversation with another, from the role-pair permission matrix,
learner progress, daily limits and availability windows.
"""
