from combargs import options

options.TESTING = True
