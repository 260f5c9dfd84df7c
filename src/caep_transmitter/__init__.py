"""
caep_transmitter — Action handler that emits CAEP device compliance change SETs.
"""
