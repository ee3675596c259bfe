"""autostart-router.

Opens OEM auto-start / battery optimization settings screens on an Android
device over adb, walking a per-manufacturer list of candidate screens and
falling back to the platform battery optimization request.
"""
