# Service layer for the tcpinfo request service
# - commands:   pure request -> response dispatch (no sockets)
# - handler:    one read/dispatch/write/close cycle per connection
# - listener:   bound socket, accept loop, start/stop lifecycle
# - tcp_client: one-shot client used by the client panel
