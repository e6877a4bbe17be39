"""
Remote control for a microcontroller-driven vehicle over a Bluetooth serial link.

- Transport: opens a byte stream to the vehicle and reads/writes it.
    RfcommTransport (Bluetooth socket), SerialTransport (SPP bound to a serial port)
- Commands: a directional Intent is sent as a single byte ('f', 'b', 'l', 'r', 's').
    Text sent back by the vehicle is passed on as it was read. There is no framing,
    so a message may arrive split across reads or merged with the next one.
- SessionManager: owns the transport handle. Connects, listens, sends, and reconnects
    a bounded number of times with a fixed delay when the link drops.
- Events: the session reports what happens through an EventSource. Callers choose where
    handlers run: on a dedicated thread (ExecutorEventSource), on their own thread by
    calling publish() (QueuedEventSource), or synchronously (EventSource).
- DriveControls: hold-to-drive on top of a session - press moves, release stops.


## Threading

The caller's thread never blocks on I/O. A connect attempt runs on its own thread, or on the
retry timer's thread. Writes run one at a time on a writer thread, in the order they were sent.
The listen loop reads on its own thread, and closing the handle is how it is unblocked.

All state changes happen under one lock, which is never held while blocking on I/O.
"""
