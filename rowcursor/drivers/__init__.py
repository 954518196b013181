from rowcursor.drivers.drivers import BaseDriver


__all__ = ["BaseDriver"]
